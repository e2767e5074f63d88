"""
alternance.api

Couche HTTP (FastAPI) : routeurs, dépendances et conversion des résultats du moteur en payloads.
"""
