"""
Infrastructure layer for the SkillLink Africa marketplace.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy, Postgres on Supabase or local SQLite)
- Authentication (Supabase Auth)
- Payment provider and job board clients
- Email services

It implements the repository interfaces defined in the domain layer.
"""
