from voicetwin.conversation.engine import GENERATION_CONFIG, ConversationEngine, GenerationClient

__all__ = ["GENERATION_CONFIG", "ConversationEngine", "GenerationClient"]
