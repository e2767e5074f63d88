"""
alternance.schemas

Package des schémas API (Pydantic).

Rôle (fonctionnel) :
- Définit les modèles d’entrée/sortie utilisés par l’API (request/response).
- Sépare clairement :
  - les modèles ORM (alternance.models) = persistance DB
  - les types du moteur (alternance.services.risk_types) = calcul pur
  - les schémas Pydantic (alternance.schemas) = contrat HTTP / validation
"""
