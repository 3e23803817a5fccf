"""Tailor Mint: backend de la boutique de couture sur mesure (sac, checkout Stripe, commandes)."""
