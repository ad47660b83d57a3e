"""FastAPI dependencies for the per-app singletons.

Learn: create_app() builds one SessionStore, AuthGateway, MessageStore and
EventDistributor and parks them on app.state. Handlers reach them via
Depends(...) on these helpers, which take an HTTPConnection so they work
for both HTTP requests and WebSockets.
"""

from starlette.requests import HTTPConnection

from relayboard.auth.gateway import AuthGateway
from relayboard.config import Settings
from relayboard.realtime.distributor import EventDistributor
from relayboard.services.message_store import MessageStore


def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.settings


def get_gateway(conn: HTTPConnection) -> AuthGateway:
    return conn.app.state.gateway


def get_message_store(conn: HTTPConnection) -> MessageStore:
    return conn.app.state.message_store


def get_distributor(conn: HTTPConnection) -> EventDistributor:
    return conn.app.state.distributor
