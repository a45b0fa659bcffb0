"""
Therapy clinic backend.

Structure:
- config.py     : settings from the environment (.env supported)
- db.py         : SQLAlchemy engine and sessions
- models.py     : ORM models (Patient, Therapist, Session) and SessionStatus
- schemas.py    : request validation
- errors.py     : domain exceptions and the error translator
- log.py        : JSON logging setup
- auth.py       : admin cookie gate
- services.py   : CRUD and public queries
- responses.py  : response envelope and error shaping per router
- api_*.py      : FastAPI app and routers
- client.py     : HTTP client for the API
- seed.py       : demo data
- cli.py        : command line entry point
"""
