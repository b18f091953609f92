"""JSON web API for the simulator.

This package provides a Flask application that runs simulations over
HTTP.  It is an **optional** extra — install with::

    pip install py-memsim[web]

The ``create_app`` factory in ``app.py`` serves two endpoints:

- ``GET /api/policies`` — the supported replacement policies.
- ``POST /api/simulate`` — replay a trace and return the output lines.
"""
