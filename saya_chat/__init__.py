"""
Passcode-gated streaming chat with web-grounded citations.

This package provides a session state engine for a single-user chat front
end: a numeric passcode gate, an append-only conversation log that merges
citations exactly once per reference, and a chat session that streams one
turn at a time from a litellm-backed provider.

Key Components:
- PasscodeGate: Fixed-length numeric passcode state machine
- ConversationLog: Ordered turns with a single open assistant turn
- ChatSession: Drives one streamed turn at a time against the provider
- ChatApplication: Wires the gate, log and lazily created session together

Example Usage:
    ```python
    import asyncio
    from saya_chat.config import load_config
    from saya_chat.core.application import ChatApplication
    from saya_chat.provider.llm_client import LLMClient

    config = load_config()
    provider = LLMClient(model=config.model, temperature=config.temperature, logger=logger)
    app = ChatApplication(config, provider, logger)

    for digit in "0001":
        app.gate.append_digit(digit)

    asyncio.run(app.send_turn("Who discovered penicillin?"))
    for turn in app.log.turns:
        print(turn.role, turn.content, [source.label for source in turn.sources])
    ```
"""

__all__ = [
    # Main interfaces live in saya_chat.core
]

__version__ = '0.1.0'
