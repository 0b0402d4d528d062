"""WSGI entrypoint for deploying the Nencho backend behind Passenger."""

from nencho.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
