"""
Core attestation components: record store, commitment ledger, engine,
admin gate and settings.
"""
