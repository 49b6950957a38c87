"""
Order Store - initialisation et contrat d'intégrité de la base Order Service
"""
