"""Pricing, usage reports and Stripe billing."""
