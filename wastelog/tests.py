"""
Waste log app tests

The test cases live in the top-level tests/ package and are found by the
default discovery of: python manage.py test
"""
