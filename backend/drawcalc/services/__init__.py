# Services package init
"""
DrawCalc Backend - Services Layer
=================================

Service Inventory:
    - InferenceClient (abstract): interface for drawing interpreters
    - GeminiClient: concrete implementation on Google Gemini
    - InferenceClientProvider: once-only construction of the shared client
    - response_parser: strict + salvage decoding of the model's reply
    - prompts: the fixed calculator instruction text
"""
