# -*- coding: utf-8 -*-
"""
dojo_rank_history.py
--------------------
Immutable log of every rank promotion.

Each record holds a full snapshot of the member's rank before and after
the promotion (belt, stripe pattern, stripe count, mode, kids degree),
never a delta, so the history can be audited on its own.  Records are
only created by OdooRankStore.apply_promotion_atomic, in the same
savepoint as the member update; a create without the ledger context flag
is refused, and the access rights grant no create at all.
"""

import datetime

from dojo_rank_ledger import belts, stripes
from dojo_rank_ledger.constants import StripeMode
from dojo_rank_ledger.state import RankHistoryEntry, RankState

from odoo import api, fields, models, _
from odoo.exceptions import UserError

from .rank_store import LEDGER_WRITE_CTX

STRIPE_MODE_SELECTION = [
    (StripeMode.MANUAL.value,     'Manual'),
    (StripeMode.CURRICULUM.value, 'Kids Curriculum Degree'),
]


class DojoRankHistory(models.Model):
    _name = 'dojo.rank.history'
    _description = 'Member Rank Promotion History'
    _order = 'awarded_dt desc, sequence desc, id desc'
    _rec_name = 'summary'

    member_id = fields.Many2one(
        'res.partner', string='Member',
        required=True, ondelete='restrict', index=True, readonly=True,
    )
    entry_uid = fields.Char(string='Entry ID', required=True, readonly=True, index=True)
    sequence = fields.Integer(
        string='Promotion #', required=True, readonly=True,
        help='Per-member promotion counter; equals the member rank version after this promotion.',
    )
    awarded_dt = fields.Datetime(
        string='Awarded On', required=True, readonly=True, default=fields.Datetime.now,
    )
    awarded_by_id = fields.Many2one(
        'res.partner', string='Awarded By', readonly=True, ondelete='set null',
    )
    notes = fields.Text(string='Notes', readonly=True)
    company_id = fields.Many2one(
        'res.company', string='Dojo', readonly=True,
        default=lambda self: self.env.company,
    )

    # ── Before ──────────────────────────────────────────────────────────────
    previous_belt = fields.Char(string='From Belt', readonly=True)
    previous_stripe_count = fields.Integer(string='From Stripes', readonly=True)
    previous_stripe_pattern = fields.Json(string='From Pattern', readonly=True)
    previous_stripe_mode = fields.Selection(STRIPE_MODE_SELECTION, string='From Mode', readonly=True)
    previous_kids_degree = fields.Integer(string='From Degree', readonly=True)

    # ── After ───────────────────────────────────────────────────────────────
    new_belt = fields.Char(string='Belt', required=True, readonly=True)
    new_stripe_count = fields.Integer(string='Stripes', readonly=True)
    new_stripe_pattern = fields.Json(string='Pattern', readonly=True)
    new_stripe_mode = fields.Selection(STRIPE_MODE_SELECTION, string='Mode', readonly=True)
    new_kids_degree = fields.Integer(string='Degree', readonly=True)

    summary = fields.Char(compute='_compute_summary')

    _dojo_rank_history_member_sequence_unique = models.Constraint(
        'unique(member_id, sequence)',
        'A member can only have one promotion per sequence number.',
    )
    _dojo_rank_history_entry_uid_unique = models.Constraint(
        'unique(entry_uid)',
        'History entry IDs must be unique.',
    )

    @api.depends('previous_belt', 'previous_stripe_count', 'new_belt', 'new_stripe_count')
    def _compute_summary(self):
        for rec in self:
            rec.summary = '%s → %s' % (
                rec._snapshot('previous').describe(),
                rec._snapshot('new').describe(),
            )

    # ── Immutability ──────────────────────────────────────────────────────────
    @api.model_create_multi
    def create(self, vals_list):
        if not self.env.context.get(LEDGER_WRITE_CTX):
            raise UserError(_(
                'Promotion history is recorded by promoting the member, '
                'not created on its own.'
            ))
        return super().create(vals_list)

    def write(self, vals):
        raise UserError(_('Promotion history entries cannot be modified. '
                          'Record a new promotion instead.'))

    def unlink(self):
        raise UserError(_(
            'Promotion history records cannot be deleted to preserve audit integrity.'
        ))

    # ── Conversion to / from ledger entries ───────────────────────────────────
    @api.model
    def _snapshot_vals(self, prefix, state):
        return {
            f'{prefix}_belt': state.belt,
            f'{prefix}_stripe_count': state.stripe_count,
            f'{prefix}_stripe_pattern': stripes.as_values(state.pattern),
            f'{prefix}_stripe_mode': state.mode.value,
            f'{prefix}_kids_degree': state.degree or 0,
        }

    @api.model
    def _vals_from_entry(self, member_id, entry):
        awarded_dt = entry.created_at
        if awarded_dt.tzinfo is not None:
            awarded_dt = awarded_dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        vals = {
            'member_id': int(member_id),
            'entry_uid': entry.id,
            'sequence': entry.sequence,
            'awarded_dt': awarded_dt,
            'awarded_by_id': int(entry.actor) if entry.actor else False,
            'notes': entry.note or False,
        }
        vals.update(self._snapshot_vals('previous', entry.previous))
        vals.update(self._snapshot_vals('new', entry.next))
        return vals

    def _snapshot(self, prefix):
        self.ensure_one()
        version = self.sequence if prefix == 'new' else self.sequence - 1
        return RankState.create(
            self[f'{prefix}_belt'] or belts.DEFAULT_BELT,
            pattern=self[f'{prefix}_stripe_pattern'],
            mode=self[f'{prefix}_stripe_mode'] or StripeMode.MANUAL,
            degree=self[f'{prefix}_kids_degree'],
            version=max(version, 0),
        )

    def _to_entry(self):
        self.ensure_one()
        return RankHistoryEntry(
            id=self.entry_uid,
            member_id=self.member_id.id,
            previous=self._snapshot('previous'),
            next=self._snapshot('new'),
            actor=str(self.awarded_by_id.id) if self.awarded_by_id else None,
            note=self.notes or None,
            created_at=self.awarded_dt.replace(tzinfo=datetime.timezone.utc),
            sequence=self.sequence,
        )

    def _to_api_dict(self):
        self.ensure_one()
        data = self._to_entry().to_dict()
        data.update({
            'id': self.id,
            'entry_uid': self.entry_uid,
            'awarded_by': self.awarded_by_id.name or '',
        })
        return data
