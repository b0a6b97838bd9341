"""Sistema de Chamados - núcleo de gestão de tickets de suporte."""
