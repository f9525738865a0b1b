"""auth/ -- Authentication and authorization package for the rental backend.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, inventory/, contact/, or media/.
api/ imports from auth/, not the other way around.
"""
