"""
Twilio Realtime Voice Relay - Twilio Media Streams to OpenAI Realtime API Bridge

This application answers phone calls arriving through Twilio and lets callers talk
with an OpenAI Realtime model. Twilio streams the caller's audio over a WebSocket; the
relay forwards it to the Realtime API and plays the model's synthesized speech back
into the call.

Architecture Overview:
- FastAPI server exposing the Twilio voice webhook and the media-stream WebSocket
- One OpenAI Realtime WebSocket connection per call
- Stateless envelope translation between the two protocols (both carry G.711 mu-law)
- A per-call relay state machine with configurable teardown

Key Components:
- bot: Envelope codec, Realtime API connection and the relay engine
- config: Application-wide constants, settings and logging setup
- handlers: The incoming-call webhook producing TwiML
- models: Wire schemas and per-call session state
- events: Structured event emission used by the relay core
- websocket_manager: Accepts media-stream connections and runs one relay per call

Getting Started:
1. Set up environment variables (or a .env file):
   - OPENAI_API_KEY: Your OpenAI API key (required)
   - PORT: Port to run the server on (default 5050)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point your Twilio phone number's voice webhook to:
   - https://your-server/incoming-call
"""
