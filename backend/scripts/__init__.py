"""
scripts

Package utilitaire pour les scripts de maintenance / data.

Rôle (fonctionnel) :
- Contient des scripts exécutables (CLI) liés au projet :
  - génération de données de démo (seed_demo)
  - évaluation ponctuelle d’un apprenant (assess_one)

Note :
- Les scripts ne doivent pas contenir de logique métier “centrale” :
  ils orchestrent et appellent les modules de `alternance/` (services, db, models).
"""
