"""
Use cases that sit outside the request/response cycle.

The report worker only depends on the ResourceStore read interface, so it
can run inside the API process or as a separate process (``python -m aura.services.report_worker``).
"""
