from podboard.models.llm import ModelChoice

SEGMENTER_MODEL = ModelChoice.OPENAI_GPT4O_MINI
