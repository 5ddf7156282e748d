from tests.fakes.fake_llm import FailingTextGenerator, FakeTextGenerator

__all__ = ["FakeTextGenerator", "FailingTextGenerator"]
