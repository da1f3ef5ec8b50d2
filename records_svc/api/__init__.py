"""
HTTP layer of the Medical Records Service.
"""
