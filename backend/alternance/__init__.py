"""
alternance

Package racine du backend de suivi des alternants (progression + risque de décrochage).

Rôle (fonctionnel) :
- Contient tout le code applicatif (API, moteur de risque, accès DB, schémas).
- Sert de point d’ancrage pour les imports : `from alternance...`

Organisation (haute-level) :
- alternance.api      : routes FastAPI (contrats HTTP, dépendances, sérialisation)
- alternance.core     : briques transverses (settings, errors, logs, sécurité, request_id)
- alternance.db       : base SQLAlchemy + session async
- alternance.models   : modèles ORM (tables Postgres)
- alternance.schemas  : schémas Pydantic (entrées/sorties API)
- alternance.services : moteur de risque (pur) + orchestration (lecture DB, persistance, rapports)
"""
