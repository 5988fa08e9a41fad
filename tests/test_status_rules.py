from __future__ import annotations

import pytest

from boletos.services.exceptions import InvalidInputError
from boletos.services.status_rules import apply_status_rules


class TestApplyStatusRules:
    @pytest.mark.parametrize("emissao", ["Criado", "Cancelado"])
    def test_reset_payment_to_na(self, emissao):
        result = apply_status_rules("Pago", {"status_emissao": emissao, "status_pagamento": "Pago"})
        assert result["status_pagamento"] == "N/A"

    def test_emitido_opens_na_payment(self):
        result = apply_status_rules("N/A", {"status_emissao": "Emitido"})
        assert result == {"status_emissao": "Emitido", "status_pagamento": "Em Aberto"}

    def test_emitido_overrides_requested_na(self):
        result = apply_status_rules("N/A", {"status_emissao": "Emitido", "status_pagamento": "N/A"})
        assert result["status_pagamento"] == "Em Aberto"

    def test_emitido_keeps_existing_payment(self):
        result = apply_status_rules("Em Atraso", {"status_emissao": "Emitido"})
        assert "status_pagamento" not in result

    def test_payment_only_update_untouched(self):
        update = {"status_pagamento": "Pago", "nosso_numero": "123"}
        assert apply_status_rules("Em Aberto", update) == update

    def test_does_not_mutate_input(self):
        update = {"status_emissao": "Cancelado"}
        apply_status_rules("Pago", update)
        assert update == {"status_emissao": "Cancelado"}

    def test_unknown_emissao(self):
        with pytest.raises(InvalidInputError, match="emissao"):
            apply_status_rules("N/A", {"status_emissao": "Pendente"})

    def test_unknown_pagamento(self):
        with pytest.raises(InvalidInputError, match="pagamento"):
            apply_status_rules("N/A", {"status_pagamento": "Quitado"})
