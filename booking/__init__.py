"""Hospital bed booking app.

Storage, services, serializers and views implementing bed search,
booking, hospital inventory management and the administrator approval
workflow.
"""
