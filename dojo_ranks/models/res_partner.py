# -*- coding: utf-8 -*-
"""
res_partner.py
--------------
Extends res.partner with the member's live rank:

  is_member          – flag marking this contact as a dojo member
  belt_rank          – belt from the dojo_rank_ledger catalog (adult + kids)
  stripe_count       – 0..4, always the number of filled pattern slots
  stripe_pattern     – four stripe tokens; empty when no slot is filled, so
                       count-only records imported from older systems keep
                       their default stripe colour
  stripe_mode        – manual pattern or kids curriculum degree
  kids_degree        – 0..11, only meaningful in curriculum mode
  rank_version       – promotions applied so far (optimistic lock)
  rank_history_ids   – immutable promotion history

Rank fields are only written through dojo_promote() / dojo_add_stripe(),
which store the new rank and its history record together.
"""

import logging

from markupsafe import Markup

from dojo_rank_ledger import belts, service, stripes
from dojo_rank_ledger.constants import MAX_DEGREE, SLOT_COUNT, StripeMode
from dojo_rank_ledger.exceptions import InvalidRequest, MemberNotFound, PersistenceFailure
from dojo_rank_ledger.state import RankState

from odoo import api, fields, models, _
from odoo.exceptions import UserError, ValidationError

from .dojo_rank_history import STRIPE_MODE_SELECTION
from .rank_store import LEDGER_WRITE_CTX, OdooRankStore

_logger = logging.getLogger(__name__)

HISTORY_LIMIT_PARAM = 'dojo_ranks.history_max_limit'

RANK_FIELDS = frozenset([
    'belt_rank', 'stripe_count', 'stripe_pattern', 'stripe_mode',
    'kids_degree', 'rank_version',
])


class ResPartner(models.Model):
    _inherit = 'res.partner'

    is_member = fields.Boolean(
        string='Is Member',
        default=False,
        help='Tick to mark this contact as a dojo member.',
    )
    belt_rank = fields.Selection(
        selection=belts.selection(),
        string='Belt Rank',
        default=belts.DEFAULT_BELT,
        index=True,
    )
    stripe_count = fields.Integer(string='Stripes', default=0)
    stripe_pattern = fields.Json(
        string='Stripe Pattern',
        help='Four slots, most senior first: none / white / red / yellow / black.',
    )
    stripe_mode = fields.Selection(
        selection=STRIPE_MODE_SELECTION,
        string='Stripe System',
        default=StripeMode.MANUAL.value,
    )
    kids_degree = fields.Integer(string='Kids Degree', default=0)
    rank_version = fields.Integer(string='Rank Version', default=0, readonly=True, copy=False)
    last_promotion_dt = fields.Datetime(string='Last Promotion', readonly=True, copy=False)
    last_promoted_by_id = fields.Many2one(
        'res.partner', string='Last Promoted By', readonly=True, copy=False,
    )
    rank_history_ids = fields.One2many(
        'dojo.rank.history', 'member_id', string='Promotion History', readonly=True,
    )
    rank_history_count = fields.Integer(compute='_compute_rank_display')
    rank_display = fields.Char(string='Rank', compute='_compute_rank_display')
    stripe_display = fields.Char(string='Stripes (slots)', compute='_compute_rank_display')
    is_youth_belt = fields.Boolean(compute='_compute_rank_display')

    @api.depends('belt_rank', 'stripe_count', 'stripe_pattern', 'stripe_mode',
                 'kids_degree', 'rank_history_ids')
    def _compute_rank_display(self):
        for rec in self:
            state = rec._dojo_rank_state()
            rec.rank_display = state.describe()
            rec.stripe_display = stripes.format_stripes(state.pattern)
            rec.is_youth_belt = belts.is_youth_family(state.belt)
            rec.rank_history_count = len(rec.rank_history_ids)

    @api.constrains('stripe_count')
    def _check_stripe_count(self):
        for rec in self:
            if not 0 <= rec.stripe_count <= SLOT_COUNT:
                raise ValidationError(_('Stripes must be between 0 and %s.') % SLOT_COUNT)

    @api.constrains('kids_degree')
    def _check_kids_degree(self):
        for rec in self:
            if not 0 <= rec.kids_degree <= MAX_DEGREE:
                raise ValidationError(_('Kids degree must be between 0 and %s.') % MAX_DEGREE)

    def write(self, vals):
        if RANK_FIELDS.intersection(vals) and not self.env.context.get(LEDGER_WRITE_CTX):
            raise UserError(_(
                'Belt and stripes can only be changed through a promotion, '
                'so that the promotion history stays complete.'
            ))
        return super().write(vals)

    # ------------------------------------------------------------------
    # Rank state
    # ------------------------------------------------------------------
    def _dojo_rank_record(self):
        self.ensure_one()
        record = {
            'belt': self.belt_rank or belts.DEFAULT_BELT,
            'stripe_count': self.stripe_count,
            'version': self.rank_version,
        }
        if self.stripe_pattern:
            record['stripe_pattern'] = self.stripe_pattern
        if self.stripe_mode == StripeMode.CURRICULUM.value:
            record['degree'] = self.kids_degree
        return record

    def _dojo_rank_state(self):
        return RankState.from_record(self._dojo_rank_record())

    def _dojo_actor(self):
        return str(self.env.user.partner_id.id) if self.env.user.partner_id else None

    @api.model
    def _dojo_history_max_limit(self):
        value = self.env['ir.config_parameter'].sudo().get_param(
            HISTORY_LIMIT_PARAM, service.MAX_HISTORY_LIMIT)
        try:
            return max(int(value), 1)
        except (TypeError, ValueError):
            return service.MAX_HISTORY_LIMIT

    # ------------------------------------------------------------------
    # Promotions
    # ------------------------------------------------------------------
    def _dojo_apply(self, operation, *args, **kwargs):
        """Run a ledger write on this member and post it in the Chatter.

        Ledger errors propagate unchanged; the JSON API maps them to HTTP codes.
        """
        self.ensure_one()
        outcome = operation(OdooRankStore(self.env), self.id, *args, **kwargs)
        self._dojo_post_promotion(outcome)
        return outcome

    def _dojo_run(self, operation, *args, **kwargs):
        """Same as _dojo_apply, with ledger errors turned into user errors."""
        try:
            return self._dojo_apply(operation, *args, **kwargs)
        except InvalidRequest as e:
            raise UserError(_('Promotion not applied: %s') % e) from e
        except MemberNotFound as e:
            raise UserError(_('Member not found.')) from e
        except PersistenceFailure as e:
            raise UserError(_(
                'Promotion not applied: the rank was changed by someone else '
                'or could not be saved. Reload and try again.'
            )) from e

    def dojo_promote(self, belt, mode=StripeMode.MANUAL.value, manual_pattern=None,
                     degree=None, note=None, fallback_to_manual=False):
        """Award ``belt`` with the given stripes; returns the ledger outcome."""
        self.ensure_one()
        return self._dojo_run(
            service.promote_member,
            belt,
            mode=mode,
            manual_pattern=manual_pattern,
            degree=degree,
            note=note,
            actor=self._dojo_actor(),
            fallback_to_manual=fallback_to_manual,
            known_belts_only=True,
        )

    def dojo_add_stripe(self, note=None):
        return self._dojo_run(service.add_stripe, actor=self._dojo_actor(), note=note)

    def dojo_rank_history(self, limit=service.DEFAULT_HISTORY_LIMIT):
        self.ensure_one()
        return list(service.get_rank_history(
            OdooRankStore(self.env), self.id, limit=limit,
            max_limit=self._dojo_history_max_limit(),
        ))

    def _dojo_post_promotion(self, outcome):
        self.invalidate_recordset()
        previous, new = outcome.previous_state, outcome.next_state
        body_lines = [
            Markup('<p><strong>🥋 Rank Promotion</strong></p>'),
            Markup('<ul>'),
            Markup('<li><b>From:</b> %s</li>') % previous.describe(),
            Markup('<li><b>To:</b> %s</li>') % new.describe(),
            Markup('<li><b>Stripes:</b> %s</li>') % stripes.format_stripes(new.pattern),
            Markup('</ul>'),
        ]
        # Staff without write access on contacts still record promotions.
        self.sudo().message_post(
            body=Markup('\n').join(body_lines),
            subject=_('Rank Promoted: %s → %s') % (previous.describe(), new.describe()),
            message_type='comment',
            subtype_xmlid='mail.mt_note',
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def action_open_promote_wizard(self):
        self.ensure_one()
        return {
            'type': 'ir.actions.act_window',
            'name': _('Promote %s') % self.name,
            'res_model': 'dojo.rank.promote.wizard',
            'view_mode': 'form',
            'target': 'new',
            'context': {'default_partner_id': self.id},
        }

    def action_add_stripe(self):
        self.ensure_one()
        outcome = self.dojo_add_stripe()
        return {
            'type': 'ir.actions.client',
            'tag': 'display_notification',
            'params': {
                'message': _('%s is now %s.') % (self.name, outcome.next_state.describe()),
                'type': 'success',
                'sticky': False,
                'next': {'type': 'ir.actions.act_window_close'},
            },
        }

    def action_view_rank_history(self):
        self.ensure_one()
        return {
            'type': 'ir.actions.act_window',
            'name': _('Promotion History – %s') % self.name,
            'res_model': 'dojo.rank.history',
            'view_mode': 'list,form',
            'domain': [('member_id', '=', self.id)],
        }
