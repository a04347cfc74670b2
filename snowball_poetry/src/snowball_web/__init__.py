"""Flask front end for the snowball poem generator (see web.py)."""
