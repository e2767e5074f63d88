"""
alternance.services

Package “services” : moteur de risque et logique applicative, indépendants des endpoints HTTP.

Contenu :
- Moteur pur (synchrone, sans I/O) :
  progression, risk_factors, risk_scorer, interventions, trend_predictor, risk_engine
- Accès données : progress_data (snapshots, historique, listes d’apprenants)
- Orchestration : risk_assessment_service (évaluation, persistance, rapports, prédiction)

Principe :
- alternance.api = transport HTTP (routes, validation, dépendances)
- alternance.services = calcul + orchestration (réutilisable, testable)
"""
