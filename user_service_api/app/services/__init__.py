"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to
storage only through a repository interface, so API handlers never see
SQL.
"""
