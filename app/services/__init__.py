"""Business logic shared by the API routers, voice-agent tools and webhooks"""
