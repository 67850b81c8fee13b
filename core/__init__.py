"""
Core building blocks that talk to the outside world:

- obs:          OBS websocket request client, event models and listener
- provisioning: per-game scene / capture source provisioning
- notify:       readiness and game-change signals to the coordinator
"""
