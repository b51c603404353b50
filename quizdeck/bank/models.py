from typing import List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class QuestionItem(BaseModel):
    """One question/answer pair from the static bank.

    Serialized with the short ``q``/``a`` keys used by bank files.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str = Field(..., alias='q')
    answer: str = Field(..., alias='a')


class QuizCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    questions: List[QuestionItem] = Field(default_factory=list)


class BankMetadata(BaseModel):
    chapter_number: str = Field('', alias='chapterNumber')
    title: str = ''
    description: str = ''

    model_config = ConfigDict(populate_by_name=True)


class QuizBank(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chapter_number: str = Field('', alias='chapterNumber')
    title: str = ''
    description: str = ''
    categories: List[QuizCategory] = Field(default_factory=list)

    def metadata(self) -> BankMetadata:
        return BankMetadata(chapterNumber=self.chapter_number, title=self.title, description=self.description)

    def category_titles(self) -> List[str]:
        return [c.title for c in self.categories]

    def get_category(self, title: str):
        for c in self.categories:
            if c.title == title:
                return c
        return None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
