"""
DirectChat relay server.

Issues bearer tokens behind a password and optional captcha, keeps a bounded
chat history for polling clients, and fans relayed chat out to in-game
players.
"""
