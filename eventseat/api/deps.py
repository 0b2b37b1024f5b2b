"""
Request dependencies shared by the routers
"""

from fastapi import Request

from eventseat.services.repositories import GuestStore

def get_store(request: Request) -> GuestStore:
    """The store built at startup for this application instance"""
    return request.app.state.store
