"""Бонусная программа для барменов: баллы за продажи, призы, вывод заработка."""

__version__ = "0.1.0"
