"""Default keyword tables for the categorization engine.

Both tables are plain data so they can be replaced by a JSON file without
touching the matching code (see ``CategorizationEngine.from_file``).
Keywords are matched on lower-cased, accent-stripped text, so accents here are
optional.
"""

# (category name, implied type, base confidence, keywords)
DEFAULT_KEYWORD_TABLE = (
    (
        "Alimentação",
        "expense",
        95,
        (
            "supermercado", "mercado", "mercadinho", "mercearia", "hortifruti",
            "padaria", "panificadora", "acougue", "lanchonete", "pastelaria",
            "hamburgueria", "pizzaria", "esfiharia", "restaurante", "self service",
            "churrascaria", "buffet", "marmita", "boteco", "cervejaria", "delivery",
            "ifood", "ubereats", "rappi", "mcdonalds", "burger king", "subway",
            "starbucks", "cafeteria", "lanche", "pizza",
        ),
    ),
    (
        "Transporte",
        "expense",
        95,
        (
            "posto", "gasolina", "etanol", "diesel", "combustivel", "ipiranga",
            "uber", "99app", "cabify", "blablacar", "passagem", "onibus",
            "rodoviaria", "metro", "bilhete unico", "estacionamento", "pedagio",
            "sem parar", "taxi", "ipva", "licenciamento",
        ),
    ),
    (
        "Compras",
        "expense",
        90,
        (
            "shopping", "loja", "lojas americanas", "magazine", "carrefour",
            "atacadao", "mercado livre", "amazon", "submarino", "shopee",
            "aliexpress", "vestuario", "calcados", "boutique", "perfumaria",
            "eletronicos", "informatica", "eletrodomestico", "moveis",
            "material de construcao",
        ),
    ),
    (
        "Saúde",
        "expense",
        95,
        (
            "farmacia", "drogaria", "drogasil", "droga raia", "panvel", "hospital",
            "clinica", "laboratorio", "exame", "consulta", "plano de saude",
            "unimed", "hapvida", "amil", "dentista", "odontologia", "fisioterapia",
            "psicologo", "nutricionista", "medico",
        ),
    ),
    (
        "Educação",
        "expense",
        95,
        (
            "escola", "colegio", "faculdade", "universidade", "cursinho", "curso",
            "udemy", "alura", "coursera", "senac", "senai", "material escolar",
            "livraria", "papelaria", "apostila",
        ),
    ),
    (
        "Serviços",
        "expense",
        90,
        (
            "salao", "cabeleireiro", "barbearia", "manicure", "assinatura",
            "netflix", "spotify", "amazon prime", "disney", "hbo", "globoplay",
            "deezer", "youtube premium", "academia", "smartfit", "pilates",
            "manutencao", "conserto", "assistencia tecnica", "seguro", "seguradora",
            "cartorio", "consorcio",
        ),
    ),
    (
        "Moradia",
        "expense",
        95,
        (
            "aluguel", "imobiliaria", "condominio", "conta de luz", "energia",
            "cemig", "enel", "eletropaulo", "copel", "conta de agua", "sabesp",
            "sanepar", "copasa", "internet", "vivo", "claro", "telefonia",
            "ultragaz", "supergasbras", "botijao",
        ),
    ),
    (
        "Lazer",
        "expense",
        90,
        (
            "cinema", "ingresso", "show", "teatro", "balada", "parque", "viagem",
            "turismo", "hotel", "pousada", "airbnb", "resort", "karaoke",
            "boliche", "steam", "playstation",
        ),
    ),
    (
        "Investimentos",
        "expense",
        95,
        (
            "cdb", "rdb", "tesouro direto", "lci", "lca", "acoes", "fii",
            "aplicacao", "aplicacao rdb", "investimento", "aporte", "previdencia",
            "previdencia privada", "poupanca", "bitcoin", "corretora",
        ),
    ),
    (
        "Impostos e Taxas",
        "expense",
        95,
        (
            "iptu", "imposto de renda", "darf", "das mei", "tarifa", "taxa bancaria",
            "manutencao de conta", "anuidade", "iof", "multa", "encargos",
        ),
    ),
    (
        "Transferências",
        "income",
        95,
        (
            "pix", "pix recebido", "pix enviado", "ted", "doc",
            "transferencia", "transferencia recebida", "transferencia enviada",
            "estorno", "resgate rdb", "mercadopago", "paypal", "picpay",
        ),
    ),
    (
        "Salário",
        "income",
        95,
        (
            "salario", "folha de pagamento", "pagamento de salario", "proventos",
            "adiantamento salarial", "decimo terceiro", "ferias",
        ),
    ),
    (
        "Rendimentos",
        "income",
        90,
        ("rendimento", "rendimentos", "juros recebidos", "dividendos", "jcp"),
    ),
    (
        "Freelance",
        "income",
        90,
        ("freelance", "freela", "honorarios", "prestacao de servico"),
    ),
)

# (phrase, implied type). The longest phrase found in a description decides
# the direction of money movement.
DEFAULT_TYPE_SIGNALS = (
    ("compra no cartao", "expense"),
    ("compra no", "expense"),
    ("compra", "expense"),
    ("pagamento de boleto", "expense"),
    ("pagamento de", "expense"),
    ("pagamento", "expense"),
    ("boleto pago", "expense"),
    ("debito automatico", "expense"),
    ("debito", "expense"),
    ("cartao de credito", "expense"),
    ("saque", "expense"),
    ("retirada", "expense"),
    ("tarifa", "expense"),
    ("anuidade", "expense"),
    ("mensalidade", "expense"),
    ("aluguel", "expense"),
    ("financiamento", "expense"),
    ("transferencia enviada", "expense"),
    ("pix enviado", "expense"),
    ("ted enviado", "expense"),
    ("enviado", "expense"),
    ("enviada", "expense"),
    ("salario", "income"),
    ("deposito", "income"),
    ("recebimento", "income"),
    ("recebido", "income"),
    ("recebida", "income"),
    ("pix recebido", "income"),
    ("ted recebido", "income"),
    ("transferencia recebida", "income"),
    ("pagamento recebido", "income"),
    ("pagamento de salario", "income"),
    ("credito em conta", "income"),
    ("estorno", "income"),
    ("rendimento", "income"),
    ("dividendos", "income"),
    ("freelance", "income"),
    ("venda", "income"),
)

DEFAULT_EXPENSE_CATEGORY = "Outros"
DEFAULT_INCOME_CATEGORY = "Outras Receitas"
