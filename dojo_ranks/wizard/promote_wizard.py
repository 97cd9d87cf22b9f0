# -*- coding: utf-8 -*-
"""
promote_wizard.py
-----------------
Transient model that asks staff to confirm a rank promotion.

The form starts from the member's current rank with the next belt of the
same family suggested.  Stripes are set slot by slot, or – for kids belts –
by picking a curriculum degree, which fills the slots automatically.
On confirmation it calls res.partner.dojo_promote(), which:
  1. Stores the new belt / stripes on the member.
  2. Appends a dojo.rank.history record in the same transaction.
  3. Posts a formatted message in the member's Chatter.
"""

from dojo_rank_ledger import belts, stripes
from dojo_rank_ledger.constants import StripeMode, StripeToken

from odoo import api, fields, models, _

from ..models.dojo_rank_history import STRIPE_MODE_SELECTION

STRIPE_TOKEN_SELECTION = [
    (StripeToken.NONE.value,   'None'),
    (StripeToken.WHITE.value,  'White'),
    (StripeToken.RED.value,    'Red'),
    (StripeToken.YELLOW.value, 'Yellow'),
    (StripeToken.BLACK.value,  'Black'),
]

SLOT_FIELDS = ('slot_1', 'slot_2', 'slot_3', 'slot_4')


class DojoRankPromoteWizard(models.TransientModel):
    _name = 'dojo.rank.promote.wizard'
    _description = 'Rank Promotion Wizard'

    partner_id = fields.Many2one(
        comodel_name='res.partner',
        string='Member',
        required=True,
        readonly=True,
    )
    current_rank_display = fields.Char(
        string='Current Rank',
        related='partner_id.rank_display',
    )
    belt = fields.Selection(
        selection=belts.selection(),
        string='New Belt',
        required=True,
    )
    stripe_mode = fields.Selection(
        selection=STRIPE_MODE_SELECTION,
        string='Stripe System',
        required=True,
        default=StripeMode.MANUAL.value,
    )
    kids_degree = fields.Integer(string='Kids Degree (0–11)', default=0)
    slot_1 = fields.Selection(STRIPE_TOKEN_SELECTION, string='Slot 1', default='none', required=True)
    slot_2 = fields.Selection(STRIPE_TOKEN_SELECTION, string='Slot 2', default='none', required=True)
    slot_3 = fields.Selection(STRIPE_TOKEN_SELECTION, string='Slot 3', default='none', required=True)
    slot_4 = fields.Selection(STRIPE_TOKEN_SELECTION, string='Slot 4', default='none', required=True)
    is_youth_belt = fields.Boolean(compute='_compute_preview')
    preview = fields.Char(string='Preview', compute='_compute_preview')
    notes = fields.Text(
        string='Promotion Notes',
        help='Optional remarks stored on the promotion history record.',
    )

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        partner = self.env['res.partner'].browse(res.get('partner_id'))
        if not partner:
            return res
        state = partner._dojo_rank_state()
        res['belt'] = state.belt if belts.is_known(state.belt) else belts.DEFAULT_BELT
        res['stripe_mode'] = state.mode.value
        res['kids_degree'] = state.degree or 0
        res.update(dict(zip(SLOT_FIELDS, stripes.as_values(state.pattern))))
        return res

    # ------------------------------------------------------------------
    # Compute / onchange
    # ------------------------------------------------------------------
    def _pattern(self):
        return stripes.normalize_from_raw([self[f] for f in SLOT_FIELDS])

    @api.depends('belt', 'stripe_mode', 'kids_degree', *SLOT_FIELDS)
    def _compute_preview(self):
        for wiz in self:
            wiz.is_youth_belt = belts.is_youth_family(wiz.belt)
            if wiz.is_youth_belt and wiz.stripe_mode == StripeMode.CURRICULUM.value:
                pattern = stripes.from_degree(wiz.kids_degree)
            else:
                pattern = wiz._pattern()
            wiz.preview = '%s  [%s]' % (belts.label(wiz.belt), stripes.format_stripes(pattern))

    @api.onchange('belt')
    def _onchange_belt(self):
        if not belts.is_youth_family(self.belt):
            self.stripe_mode = StripeMode.MANUAL.value
            self.kids_degree = 0

    @api.onchange('stripe_mode', 'kids_degree')
    def _onchange_kids_degree(self):
        if self.stripe_mode == StripeMode.CURRICULUM.value:
            self.kids_degree = stripes.clamp_degree(self.kids_degree)
            pattern = stripes.as_values(stripes.from_degree(self.kids_degree))
            for name, value in zip(SLOT_FIELDS, pattern):
                self[name] = value

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def action_suggest_next_belt(self):
        self.ensure_one()
        suggestion = belts.next_belt(self.belt)
        if suggestion:
            self.belt = suggestion
            self._onchange_belt()
        return {
            'type': 'ir.actions.act_window',
            'res_model': self._name,
            'res_id': self.id,
            'view_mode': 'form',
            'target': 'new',
        }

    def action_confirm_promotion(self):
        """Apply the promotion and post a Chatter message."""
        self.ensure_one()
        self.partner_id.dojo_promote(
            self.belt,
            mode=self.stripe_mode,
            manual_pattern=[self[f] for f in SLOT_FIELDS],
            degree=self.kids_degree,
            note=self.notes,
            fallback_to_manual=True,
        )
        return {'type': 'ir.actions.act_window_close'}
