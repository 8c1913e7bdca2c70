"""Campus leave & attendance backend.

This package is organized by feature modules (users, access, leaves,
attendance, notifications) with a thin Flask controller layer on top of
service/repository layers.
"""
