"""auth/ -- Account, password, and access token package for JobTrack.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, applications/, or uploads/.
api/ imports from auth/, not the other way around.
"""
