# -*- coding: utf-8 -*-
"""
Настройки платформы. Роутер: ``routes.router``.
"""
