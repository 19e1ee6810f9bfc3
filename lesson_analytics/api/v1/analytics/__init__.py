# -*- coding: utf-8 -*-
"""
Аналитика студентов и платформы. Роутер: ``routes.router``.
"""
