"""
alternance.db

Package base de données : base déclarative, engine async et session pour FastAPI (Depends(get_db)).
Les scripts (seed) et Alembic utilisent l’URL sync (DATABASE_URL_SYNC).
"""
