# -*- coding: utf-8 -*-
{
    'name': 'Dojo Ranks',
    'summary': 'Belt & stripe progression with an immutable promotion history',
    'description': """
Dojo Ranks
==========
Tracks each member's belt and stripes and keeps an append-only history of
every promotion:
- Belt catalog for adult and kids belts
- Four-slot stripe patterns (white / red / yellow / black)
- Kids curriculum degrees 0–11 mapped to stripe patterns
- Promotion wizard and one-click "Add Stripe"
- Promotion history with full before / after snapshots; records can
  neither be edited nor deleted
- JSON endpoints for promotions, history and belt distribution

The progression rules live in the dojo_rank_ledger Python package; this
module stores ranks and history in the database and applies both in one
transaction.
    """,
    'version': '19.0.2.0.0',
    'category': 'Membership',
    'author': 'Dojo Manager',
    'license': 'LGPL-3',
    'application': True,
    'depends': ['base', 'mail'],
    'external_dependencies': {
        'python': ['dojo-rank-ledger'],
    },
    'data': [
        'security/ir.model.access.csv',
        'data/ir_config_parameter.xml',
        'wizard/promote_wizard_views.xml',
        'views/dojo_rank_history_views.xml',
        'views/res_partner_views.xml',
        'views/menus.xml',
    ],
    'installable': True,
    'auto_install': False,
}
