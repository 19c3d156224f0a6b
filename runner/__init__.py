"""Smoke runner: fetch a fixture tree from a live server and compare bytes."""
