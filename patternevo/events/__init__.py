from patternevo.events.event_bus import EventBus, EventSink

__all__ = ["EventBus", "EventSink"]
