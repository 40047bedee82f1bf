"""
Application Layer

Use cases and the services that coordinate them.

Structure:
- commands/: operations that change a guild's queue or playback
- queries/: read-only views of queues and playback
- services/: queue, store, session registry, resolution and playback driver
- interfaces/: port interfaces for infrastructure adapters
"""
