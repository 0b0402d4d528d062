"""Translation catalogues shared by the backend and the static front-end."""
