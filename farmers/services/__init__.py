"""
Farmer registry services: status derivation, NIN lookup and certificates.
"""
