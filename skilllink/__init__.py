"""
SkillLink Africa backend.
Marketplace API for talent, employers, milestone contracts and escrow payments.
"""

__version__ = "1.0.0"
