"""
Bot Framework surface: inbound activities, connector client and the
call-up orchestrator.

Keep import side-effect free.
"""
