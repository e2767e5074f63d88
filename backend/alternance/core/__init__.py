"""
alternance.core

Package “cœur” de l’application : il regroupe tout ce qui est transversal (cross-cutting concerns),
c’est-à-dire ce qui s’applique à plusieurs endpoints/services et qui ne dépend pas d’un domaine métier
spécifique (progression, risque, interventions).

On y trouve :

- settings
  Centralise la configuration (variables d’environnement, URL de l’application, seuils, URLs DB).
  Objectif : éviter les “constantes” dispersées dans le code.

- errors
  Définit un format d’erreur API uniforme (code, message, status, request_id, timestamp) et
  l’exception applicative AppHTTPException.

- logging
  Configure les logs JSON et les enrichit (request_id, contexte métier : student_id, risk_level…).

- request_id
  Identifiant de requête (correlation id) pour tracer une requête de bout en bout.

- security
  Authentification simple par clé API pour les routes d’écriture.
"""
