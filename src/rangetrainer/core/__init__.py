"""Scoring primitives: hand action model, per-hand scorer and settings."""
