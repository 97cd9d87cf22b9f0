# -*- coding: utf-8 -*-
from . import test_rank_promotion
