"""
Realtime app: the two delivery channels and the websocket surface.

Key Components:
    - channels.py: SessionChannel, room-addressed emits over the Channels layer
    - push.py: ExpoPushChannel, device-token push over the Expo HTTP API
    - consumers/: MarketplaceConsumer (user/seller/region/category rooms)
    - middleware.py: JWT authentication for websocket connections

Usage:
    from realtime.channels import SessionChannel, user_room
    from realtime.push import ExpoPushChannel
"""
