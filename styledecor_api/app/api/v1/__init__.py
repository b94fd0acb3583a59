"""
Version 1 of the StyleDecor API.

This subpackage bundles every public endpoint: credentials, catalog,
bookings, users, administration and payments.
"""
