"""
Agents used by the Game Clipper runtime.

- SessionEventDispatcher: reacts to OBS lifecycle events and provisions the
  per-game scene
- HelperProcessBridge: runs the helper executable and streams its output
- MessageChannel: fan-out of helper events to the UI
"""
