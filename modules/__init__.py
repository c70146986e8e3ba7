"""Integration modules - reactions, weather, Nightscout and universal commands."""
