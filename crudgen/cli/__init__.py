"""
crudgen CLI

Command-line interface for generating and removing model CRUD files.
"""
