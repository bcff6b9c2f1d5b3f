"""Classroom attendance package.

Organized by feature modules (sessions, attendance, reports) with a thin Flask
controller layer over service/repository layers, plus a client-side state
cache that mirrors the HTTP API.
"""
