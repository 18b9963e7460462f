#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
CME library

Loads the unit's CME content (training levels -> modules -> articles) from a
YAML file and grades the multiple-choice self-assessment attached to each
article. Answers are option letters: 'A' for the first option, 'B' for the
second, and so on.
"""

import logging
import string
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from surgiscore.config import DEFAULT_CME_LIBRARY
from surgiscore.core.exceptions import ContentError, ScoringInputError
from surgiscore.core.scoring.utils import round_half_up

logger = logging.getLogger(__name__)


class CMEContent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class QuizQuestion(CMEContent):
    id: str
    question: str
    options: List[str] = Field(..., min_length=2, max_length=len(string.ascii_uppercase))
    answer: str = Field(..., description="Letter of the correct option")
    explanation: str = ""

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.answer not in self.letters():
            raise ValueError(f"answer {self.answer!r} is not one of {self.letters()}")
        return self

    def letters(self) -> List[str]:
        return list(string.ascii_uppercase[: len(self.options)])

    def option_text(self, letter: str) -> str:
        return self.options[self.letters().index(letter)]


class ArticleSection(CMEContent):
    heading: str
    body: str


class CMEArticle(CMEContent):
    id: str
    title: str
    overview: str
    sections: List[ArticleSection] = Field(default_factory=list)
    key_points: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    questions: List[QuizQuestion] = Field(default_factory=list)


class CMEModule(CMEContent):
    id: str
    title: str
    description: str = ""
    duration_hours: Optional[float] = Field(None, gt=0)
    articles: List[CMEArticle] = Field(default_factory=list)


class TrainingLevel(CMEContent):
    id: str
    name: str
    description: str = ""
    modules: List[CMEModule] = Field(default_factory=list)


class CMECatalogue(CMEContent):
    levels: List[TrainingLevel]


class QuizResult(BaseModel):
    score: int
    total: int
    percentage: float
    passed: bool
    incorrect: List[str] = Field(default_factory=list, description="Ids of questions answered wrongly or not at all")


class CMELibrary:
    """
    Read-only view over a CME catalogue.

    Args:
        catalogue: Parsed catalogue
    """

    def __init__(self, catalogue: CMECatalogue):
        self.catalogue = catalogue
        self._modules: Dict[str, CMEModule] = {}
        self._articles: Dict[str, CMEArticle] = {}
        for level in catalogue.levels:
            for module in level.modules:
                if module.id in self._modules:
                    raise ContentError(f"Duplicate module id {module.id}", details={"module": module.id})
                self._modules[module.id] = module
                for article in module.articles:
                    if article.id in self._articles:
                        raise ContentError(f"Duplicate article id {article.id}", details={"article": article.id})
                    self._articles[article.id] = article

    @classmethod
    def from_yaml(cls, path: Union[str, Path, None] = None) -> "CMELibrary":
        """
        Load a catalogue from YAML.

        Args:
            path: YAML file; defaults to the catalogue shipped with the package

        Raises:
            ContentError: If the file cannot be read or does not match the catalogue schema
        """
        path = Path(path) if path is not None else DEFAULT_CME_LIBRARY
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load CME library from {path}: {e}")
            raise ContentError(f"Failed to load CME library from {path}", details={"path": str(path)}) from e

        try:
            catalogue = CMECatalogue.model_validate(raw)
        except ValidationError as e:
            raise ContentError(
                f"CME library {path} is malformed",
                details={"path": str(path), "errors": e.errors(include_url=False)},
            ) from e

        library = cls(catalogue)
        logger.info(f"Loaded CME library from {path}: {len(library._modules)} modules, {len(library._articles)} articles")
        return library

    def levels(self) -> List[TrainingLevel]:
        return list(self.catalogue.levels)

    def modules_for_level(self, level_id: str) -> List[CMEModule]:
        for level in self.catalogue.levels:
            if level.id == level_id:
                return list(level.modules)
        raise ContentError(f"Unknown training level {level_id}", details={"level": level_id})

    def get_module(self, module_id: str) -> CMEModule:
        try:
            return self._modules[module_id]
        except KeyError:
            raise ContentError(f"Unknown module {module_id}", details={"module": module_id}) from None

    def get_article(self, article_id: str) -> CMEArticle:
        try:
            return self._articles[article_id]
        except KeyError:
            raise ContentError(f"Unknown article {article_id}", details={"article": article_id}) from None

    def iter_articles(self, level_id: Optional[str] = None) -> Iterator[CMEArticle]:
        levels = self.catalogue.levels if level_id is None else [
            level for level in self.catalogue.levels if level.id == level_id
        ]
        for level in levels:
            for module in level.modules:
                yield from module.articles

    def search(self, query: str, level_id: Optional[str] = None) -> List[CMEArticle]:
        """Articles whose title or overview contains the query, ignoring case."""
        needle = query.strip().lower()
        if not needle:
            return list(self.iter_articles(level_id))
        return [
            article
            for article in self.iter_articles(level_id)
            if needle in article.title.lower() or needle in article.overview.lower()
        ]


def grade_quiz(
    questions: Sequence[QuizQuestion],
    answers: Mapping[str, str],
    pass_mark: float = 50,
) -> QuizResult:
    """
    Mark a self-assessment.

    Args:
        questions: Questions making up the quiz
        answers: Question id -> chosen option letter; unanswered questions score nothing
        pass_mark: Minimum percentage to pass

    Returns:
        QuizResult with the percentage rounded to 1 dp

    Raises:
        ScoringInputError: If the quiz is empty, the pass mark is outside 0-100,
            or an answer is not a letter of its question's options
    """
    if not questions:
        raise ScoringInputError("Cannot grade an empty quiz", parameter="questions", value=0)
    if not 0 <= pass_mark <= 100:
        raise ScoringInputError("pass_mark must be between 0 and 100", parameter="pass_mark", value=pass_mark)

    by_id = {question.id: question for question in questions}
    for question_id, letter in answers.items():
        question = by_id.get(question_id)
        if question is None:
            raise ScoringInputError(f"Unknown question {question_id}", parameter="answers", value=question_id)
        if letter not in question.letters():
            raise ScoringInputError(
                f"{letter!r} is not an option for question {question_id}",
                parameter="answers",
                value=letter,
            )

    incorrect = [q.id for q in questions if answers.get(q.id) != q.answer]
    score = len(questions) - len(incorrect)
    percentage = round_half_up(score / len(questions) * 100, 1)

    return QuizResult(
        score=score,
        total=len(questions),
        percentage=percentage,
        passed=percentage >= pass_mark,
        incorrect=incorrect,
    )
