"""
Domain Layer

Pure business objects, errors and scoring models. Nothing in this package
performs I/O.
"""
