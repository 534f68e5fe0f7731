"""Translation, language detection and speech services.

Imports are not eagerly loaded here. Use explicit imports:
    from deepl_translator.services.translation.orchestrator import TranslationOrchestrator
"""
