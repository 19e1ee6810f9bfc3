# -*- coding: utf-8 -*-
"""
Трекинг и аналитика просмотров уроков. Роутер: ``routes.router``.
"""
