#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tests for the CME content library and quiz grading
"""

import tempfile
import unittest
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from surgiscore.core.exceptions import ContentError, ScoringInputError
from surgiscore.training.library import CMELibrary, QuizQuestion, grade_quiz


def write_catalogue(directory, levels):
    path = Path(directory) / 'catalogue.yaml'
    path.write_text(yaml.safe_dump({'levels': levels}), encoding='utf-8')
    return path


def article(article_id, title='Fluid resuscitation basics'):
    return {
        'id': article_id,
        'title': title,
        'overview': 'An overview.',
        'questions': [
            {'id': f"{article_id}-q1", 'question': 'Pick A', 'options': ['yes', 'no'], 'answer': 'A'},
        ],
    }


class TestPackagedLibrary(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.library = CMELibrary.from_yaml()

    def test_levels(self):
        self.assertEqual(
            [level.id for level in self.library.levels()],
            ['house_officer', 'junior_resident', 'senior_resident'],
        )

    def test_every_question_has_a_valid_answer(self):
        for item in self.library.iter_articles():
            for question in item.questions:
                self.assertIn(question.answer, question.letters(), question.id)

    def test_lookup(self):
        self.assertEqual(self.library.get_article('ho-1-1').title,
                         'Discharge Readiness and the WHO Discharge Checklist')
        self.assertEqual(self.library.get_module('ho-module-1').title, 'Ward Fundamentals')
        self.assertEqual([m.id for m in self.library.modules_for_level('senior_resident')],
                         ['sr-module-1', 'sr-module-2'])

    def test_unknown_ids(self):
        with pytest.raises(ContentError):
            self.library.get_article('nope')
        with pytest.raises(ContentError):
            self.library.get_module('nope')
        with pytest.raises(ContentError):
            self.library.modules_for_level('consultant')

    def test_search_ignores_case(self):
        self.assertIn('ho-2-2', [a.id for a in self.library.search('PARKLAND')])
        self.assertIn('ho-1-1', [a.id for a in self.library.search('who discharge')])
        self.assertEqual(self.library.search('parkland', level_id='senior_resident'),
                         [a for a in self.library.search('parkland') if a.id.startswith('sr-')])

    def test_blank_search_returns_everything(self):
        self.assertEqual(len(self.library.search('  ')), len(list(self.library.iter_articles())))


class TestCatalogueLoading(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_custom_catalogue(self):
        path = write_catalogue(self.dir, [
            {'id': 'ho', 'name': 'House Officer', 'modules': [
                {'id': 'm1', 'title': 'Burns', 'articles': [article('a1'), article('a2', 'Escharotomy')]},
            ]},
        ])
        library = CMELibrary.from_yaml(path)

        self.assertEqual([a.id for a in library.search('escharotomy')], ['a2'])

    def test_duplicate_article_ids(self):
        path = write_catalogue(self.dir, [
            {'id': 'ho', 'name': 'House Officer', 'modules': [
                {'id': 'm1', 'title': 'One', 'articles': [article('a1')]},
                {'id': 'm2', 'title': 'Two', 'articles': [article('a1')]},
            ]},
        ])
        with pytest.raises(ContentError):
            CMELibrary.from_yaml(path)

    def test_answer_must_be_an_option(self):
        bad = article('a1')
        bad['questions'][0]['answer'] = 'D'
        path = write_catalogue(self.dir, [
            {'id': 'ho', 'name': 'House Officer', 'modules': [{'id': 'm1', 'title': 'One', 'articles': [bad]}]},
        ])
        with pytest.raises(ContentError):
            CMELibrary.from_yaml(path)

    def test_unknown_keys_rejected(self):
        path = write_catalogue(self.dir, [{'id': 'ho', 'name': 'House Officer', 'colour': 'blue'}])
        with pytest.raises(ContentError):
            CMELibrary.from_yaml(path)

    def test_missing_file(self):
        with pytest.raises(ContentError):
            CMELibrary.from_yaml(Path(self.dir) / 'absent.yaml')

    def test_invalid_yaml(self):
        path = Path(self.dir) / 'broken.yaml'
        path.write_text('levels: [unclosed', encoding='utf-8')
        with pytest.raises(ContentError):
            CMELibrary.from_yaml(path)


class TestGradeQuiz(unittest.TestCase):

    def setUp(self):
        self.questions = [
            QuizQuestion(id='q1', question='Parkland volume per kg per %TBSA?', options=['2 mL', '4 mL'], answer='B'),
            QuizQuestion(id='q2', question='Adult urine target?', options=['0.5-1', '1-1.5', '2-3'], answer='A'),
            QuizQuestion(id='q3', question='Baux score?', options=['age + TBSA', 'age x TBSA'], answer='A'),
        ]

    def test_all_correct(self):
        result = grade_quiz(self.questions, {'q1': 'B', 'q2': 'A', 'q3': 'A'})

        self.assertEqual(result.score, 3)
        self.assertEqual(result.percentage, 100.0)
        self.assertTrue(result.passed)
        self.assertEqual(result.incorrect, [])

    def test_partial_and_unanswered(self):
        result = grade_quiz(self.questions, {'q1': 'B', 'q2': 'C'})

        self.assertEqual(result.score, 1)
        self.assertEqual(result.total, 3)
        self.assertEqual(result.percentage, 33.3)
        self.assertFalse(result.passed)
        self.assertEqual(result.incorrect, ['q2', 'q3'])

    def test_pass_mark(self):
        answers = {'q1': 'B', 'q2': 'A'}
        self.assertTrue(grade_quiz(self.questions, answers).passed)
        self.assertFalse(grade_quiz(self.questions, answers, pass_mark=70).passed)

    def test_invalid_input(self):
        with pytest.raises(ScoringInputError):
            grade_quiz([], {})
        with pytest.raises(ScoringInputError):
            grade_quiz(self.questions, {'q1': 'Z'})
        with pytest.raises(ScoringInputError):
            grade_quiz(self.questions, {'q9': 'A'})
        with pytest.raises(ScoringInputError):
            grade_quiz(self.questions, {}, pass_mark=120)

    def test_question_validation(self):
        with pytest.raises(ValidationError):
            QuizQuestion(id='q', question='?', options=['only one'], answer='A')
        self.assertEqual(self.questions[1].option_text('A'), '0.5-1')


if __name__ == "__main__":
    unittest.main()
