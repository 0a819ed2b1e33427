"""Elevator installation importer.

Turns a free-form elevator address text file into normalized installation
records and stores them in PostgreSQL or sends them to the REST service.
"""

__version__ = "0.1.0"
