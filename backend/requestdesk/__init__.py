"""RequestDesk - HR request triage and review backend"""
