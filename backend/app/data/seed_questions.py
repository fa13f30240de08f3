"""
Starter question bank: Class 6 Biology, grouped by topic.

Loaded into an empty database at start-up by app.services.seed.
"""

SEED_QUESTIONS = [
    # Human Body Systems
    {
        "question_text": "Which organ system is responsible for pumping blood throughout the body?",
        "options": ["Respiratory system", "Circulatory system", "Digestive system", "Nervous system"],
        "correct_answer": "Circulatory system",
        "topic": "Human Body Systems",
        "chapter": "Body Systems",
        "difficulty": "easy"
    },
    {
        "question_text": "What is the main function of the skeletal system?",
        "options": ["To digest food", "To support and protect the body", "To breathe oxygen", "To pump blood"],
        "correct_answer": "To support and protect the body",
        "topic": "Human Body Systems",
        "chapter": "Body Systems",
        "difficulty": "easy"
    },
    {
        "question_text": "Which part of the nervous system controls involuntary actions like heartbeat?",
        "options": ["Brain", "Spinal cord", "Medulla oblongata", "Cerebrum"],
        "correct_answer": "Medulla oblongata",
        "topic": "Human Body Systems",
        "chapter": "Nervous System",
        "difficulty": "medium"
    },

    # Plant Structure and Function
    {
        "question_text": "What is the main function of roots in a plant?",
        "options": ["Photosynthesis", "Reproduction", "Absorbing water and nutrients", "Making flowers"],
        "correct_answer": "Absorbing water and nutrients",
        "topic": "Plant Structure and Function",
        "chapter": "Plant Parts",
        "difficulty": "easy"
    },
    {
        "question_text": "Which part of the plant conducts photosynthesis?",
        "options": ["Roots", "Stem", "Leaves", "Flowers"],
        "correct_answer": "Leaves",
        "topic": "Plant Structure and Function",
        "chapter": "Photosynthesis",
        "difficulty": "easy"
    },
    {
        "question_text": "What gas do plants release during photosynthesis?",
        "options": ["Carbon dioxide", "Oxygen", "Nitrogen", "Hydrogen"],
        "correct_answer": "Oxygen",
        "topic": "Plant Structure and Function",
        "chapter": "Photosynthesis",
        "difficulty": "medium"
    },

    # Animal Diversity
    {
        "question_text": "Which group of animals are warm-blooded?",
        "options": ["Fish", "Reptiles", "Mammals", "Amphibians"],
        "correct_answer": "Mammals",
        "topic": "Animal Diversity",
        "chapter": "Animal Classification",
        "difficulty": "easy"
    },
    {
        "question_text": "What type of skeleton do insects have?",
        "options": ["Internal skeleton", "External skeleton", "No skeleton", "Cartilage skeleton"],
        "correct_answer": "External skeleton",
        "topic": "Animal Diversity",
        "chapter": "Invertebrates",
        "difficulty": "medium"
    },
    {
        "question_text": "Which animals can live both in water and on land?",
        "options": ["Fish", "Birds", "Amphibians", "Mammals"],
        "correct_answer": "Amphibians",
        "topic": "Animal Diversity",
        "chapter": "Animal Habitats",
        "difficulty": "easy"
    },

    # Nutrition and Digestion
    {
        "question_text": "Which nutrient provides energy to our body?",
        "options": ["Vitamins", "Minerals", "Carbohydrates", "Water"],
        "correct_answer": "Carbohydrates",
        "topic": "Nutrition and Digestion",
        "chapter": "Nutrients",
        "difficulty": "easy"
    },
    {
        "question_text": "Where does digestion begin in humans?",
        "options": ["Stomach", "Small intestine", "Mouth", "Large intestine"],
        "correct_answer": "Mouth",
        "topic": "Nutrition and Digestion",
        "chapter": "Digestive System",
        "difficulty": "easy"
    },
    {
        "question_text": "Which enzyme in saliva helps break down starch?",
        "options": ["Pepsin", "Amylase", "Lipase", "Trypsin"],
        "correct_answer": "Amylase",
        "topic": "Nutrition and Digestion",
        "chapter": "Enzymes",
        "difficulty": "medium"
    },

    # Respiration and Circulation
    {
        "question_text": "What do we breathe in from the air?",
        "options": ["Carbon dioxide", "Oxygen", "Nitrogen", "Water vapor"],
        "correct_answer": "Oxygen",
        "topic": "Respiration and Circulation",
        "chapter": "Breathing",
        "difficulty": "easy"
    },
    {
        "question_text": "Which blood vessels carry blood away from the heart?",
        "options": ["Veins", "Arteries", "Capillaries", "Ventricles"],
        "correct_answer": "Arteries",
        "topic": "Respiration and Circulation",
        "chapter": "Blood Circulation",
        "difficulty": "medium"
    },
    {
        "question_text": "How many chambers does a human heart have?",
        "options": ["Two", "Three", "Four", "Five"],
        "correct_answer": "Four",
        "topic": "Respiration and Circulation",
        "chapter": "Heart Structure",
        "difficulty": "easy"
    },

    # Growth and Development
    {
        "question_text": "What is the process by which living things produce offspring?",
        "options": ["Growth", "Reproduction", "Respiration", "Digestion"],
        "correct_answer": "Reproduction",
        "topic": "Growth and Development",
        "chapter": "Life Processes",
        "difficulty": "easy"
    },
    {
        "question_text": "Which stage comes after egg in the life cycle of a butterfly?",
        "options": ["Adult", "Pupa", "Larva", "Caterpillar"],
        "correct_answer": "Larva",
        "topic": "Growth and Development",
        "chapter": "Life Cycles",
        "difficulty": "medium"
    },
    {
        "question_text": "What do we call the young one of a frog?",
        "options": ["Cub", "Tadpole", "Chick", "Calf"],
        "correct_answer": "Tadpole",
        "topic": "Growth and Development",
        "chapter": "Animal Development",
        "difficulty": "easy"
    },

    # Reproduction
    {
        "question_text": "Which part of a flower contains the male reproductive organs?",
        "options": ["Pistil", "Stamen", "Petal", "Sepal"],
        "correct_answer": "Stamen",
        "topic": "Reproduction",
        "chapter": "Plant Reproduction",
        "difficulty": "medium"
    },
    {
        "question_text": "What is pollination?",
        "options": ["Growth of plants", "Transfer of pollen", "Making of seeds", "Flowering"],
        "correct_answer": "Transfer of pollen",
        "topic": "Reproduction",
        "chapter": "Plant Reproduction",
        "difficulty": "easy"
    },
    {
        "question_text": "Which animals lay eggs?",
        "options": ["Only birds", "Only reptiles", "Birds and reptiles", "Only mammals"],
        "correct_answer": "Birds and reptiles",
        "topic": "Reproduction",
        "chapter": "Animal Reproduction",
        "difficulty": "medium"
    },

    # Environmental Adaptation
    {
        "question_text": "What helps a cactus survive in the desert?",
        "options": ["Large leaves", "Thick waxy coating", "Deep roots", "All of the above"],
        "correct_answer": "All of the above",
        "topic": "Environmental Adaptation",
        "chapter": "Plant Adaptations",
        "difficulty": "medium"
    },
    {
        "question_text": "Why do polar bears have thick fur?",
        "options": ["To look beautiful", "To keep warm", "To swim better", "To catch prey"],
        "correct_answer": "To keep warm",
        "topic": "Environmental Adaptation",
        "chapter": "Animal Adaptations",
        "difficulty": "easy"
    },
    {
        "question_text": "Which adaptation helps fish breathe underwater?",
        "options": ["Lungs", "Gills", "Skin", "Fins"],
        "correct_answer": "Gills",
        "topic": "Environmental Adaptation",
        "chapter": "Aquatic Adaptations",
        "difficulty": "easy"
    },

    {
        "question_text": "What is the green pigment in plants called?",
        "options": ["Melanin", "Chlorophyll", "Hemoglobin", "Carotene"],
        "correct_answer": "Chlorophyll",
        "topic": "Plant Structure and Function",
        "chapter": "Photosynthesis",
        "difficulty": "easy"
    },
    {
        "question_text": "Which vitamin is produced when skin is exposed to sunlight?",
        "options": ["Vitamin A", "Vitamin B", "Vitamin C", "Vitamin D"],
        "correct_answer": "Vitamin D",
        "topic": "Nutrition and Digestion",
        "chapter": "Vitamins",
        "difficulty": "medium"
    },

    {
        "question_text": "What is the function of white blood cells?",
        "options": ["Carry oxygen", "Fight infection", "Clot blood", "Carry nutrients"],
        "correct_answer": "Fight infection",
        "topic": "Respiration and Circulation",
        "chapter": "Blood",
        "difficulty": "medium"
    },
    {
        "question_text": "Which organ filters waste from the blood?",
        "options": ["Liver", "Kidney", "Heart", "Lungs"],
        "correct_answer": "Kidney",
        "topic": "Human Body Systems",
        "chapter": "Excretory System",
        "difficulty": "easy"
    },
    {
        "question_text": "What type of joint is found in the elbow?",
        "options": ["Ball and socket", "Hinge joint", "Pivot joint", "Fixed joint"],
        "correct_answer": "Hinge joint",
        "topic": "Human Body Systems",
        "chapter": "Skeletal System",
        "difficulty": "medium"
    },
    {
        "question_text": "Which gas is released by plants at night?",
        "options": ["Oxygen", "Carbon dioxide", "Nitrogen", "Hydrogen"],
        "correct_answer": "Carbon dioxide",
        "topic": "Plant Structure and Function",
        "chapter": "Respiration",
        "difficulty": "medium"
    },
    {
        "question_text": "What is the hardest substance in the human body?",
        "options": ["Bone", "Tooth enamel", "Nail", "Cartilage"],
        "correct_answer": "Tooth enamel",
        "topic": "Human Body Systems",
        "chapter": "Digestive System",
        "difficulty": "hard"
    },
    {
        "question_text": "Which animals are called invertebrates?",
        "options": ["Animals with backbone", "Animals without backbone", "Only insects", "Only fish"],
        "correct_answer": "Animals without backbone",
        "topic": "Animal Diversity",
        "chapter": "Classification",
        "difficulty": "easy"
    },
    {
        "question_text": "What do plants need for photosynthesis besides sunlight?",
        "options": ["Only water", "Only carbon dioxide", "Water and carbon dioxide", "Only soil"],
        "correct_answer": "Water and carbon dioxide",
        "topic": "Plant Structure and Function",
        "chapter": "Photosynthesis",
        "difficulty": "easy"
    },
    {
        "question_text": "Which part of the brain controls balance?",
        "options": ["Cerebrum", "Cerebellum", "Medulla", "Spinal cord"],
        "correct_answer": "Cerebellum",
        "topic": "Human Body Systems",
        "chapter": "Nervous System",
        "difficulty": "hard"
    },
    {
        "question_text": "What is the main component of plant cell walls?",
        "options": ["Protein", "Cellulose", "Fat", "Starch"],
        "correct_answer": "Cellulose",
        "topic": "Plant Structure and Function",
        "chapter": "Cell Structure",
        "difficulty": "medium"
    },
    {
        "question_text": "Which blood type is known as the universal donor?",
        "options": ["A", "B", "AB", "O"],
        "correct_answer": "O",
        "topic": "Respiration and Circulation",
        "chapter": "Blood Types",
        "difficulty": "hard"
    },
    {
        "question_text": "What is metamorphosis?",
        "options": ["Animal migration", "Change in body form during development", "Animal hibernation", "Animal reproduction"],
        "correct_answer": "Change in body form during development",
        "topic": "Growth and Development",
        "chapter": "Life Cycles",
        "difficulty": "medium"
    },
    {
        "question_text": "Which vitamin helps in blood clotting?",
        "options": ["Vitamin A", "Vitamin C", "Vitamin D", "Vitamin K"],
        "correct_answer": "Vitamin K",
        "topic": "Nutrition and Digestion",
        "chapter": "Vitamins",
        "difficulty": "hard"
    },
    {
        "question_text": "What is the basic unit of life?",
        "options": ["Tissue", "Organ", "Cell", "System"],
        "correct_answer": "Cell",
        "topic": "Human Body Systems",
        "chapter": "Cell Biology",
        "difficulty": "easy"
    },
    {
        "question_text": "Which animals breathe through spiracles?",
        "options": ["Fish", "Birds", "Insects", "Mammals"],
        "correct_answer": "Insects",
        "topic": "Animal Diversity",
        "chapter": "Respiratory Systems",
        "difficulty": "medium"
    },
    {
        "question_text": "What is the process of water movement in plants called?",
        "options": ["Photosynthesis", "Respiration", "Transpiration", "Germination"],
        "correct_answer": "Transpiration",
        "topic": "Plant Structure and Function",
        "chapter": "Water Transport",
        "difficulty": "medium"
    },
    {
        "question_text": "Which sense organ detects sound?",
        "options": ["Eye", "Nose", "Ear", "Tongue"],
        "correct_answer": "Ear",
        "topic": "Human Body Systems",
        "chapter": "Sense Organs",
        "difficulty": "easy"
    },
    {
        "question_text": "What do carnivorous plants eat?",
        "options": ["Only sunlight", "Insects and small animals", "Only water", "Dead plant matter"],
        "correct_answer": "Insects and small animals",
        "topic": "Environmental Adaptation",
        "chapter": "Special Adaptations",
        "difficulty": "medium"
    },
    {
        "question_text": "Which hormone controls growth in humans?",
        "options": ["Insulin", "Growth hormone", "Thyroxine", "Adrenaline"],
        "correct_answer": "Growth hormone",
        "topic": "Growth and Development",
        "chapter": "Hormones",
        "difficulty": "hard"
    },
    {
        "question_text": "What is the gestation period of humans?",
        "options": ["6 months", "9 months", "12 months", "18 months"],
        "correct_answer": "9 months",
        "topic": "Reproduction",
        "chapter": "Human Reproduction",
        "difficulty": "easy"
    },
    {
        "question_text": "Which adaptation helps desert animals conserve water?",
        "options": ["Thick fur", "Large ears", "Concentrated urine", "Bright colors"],
        "correct_answer": "Concentrated urine",
        "topic": "Environmental Adaptation",
        "chapter": "Desert Adaptations",
        "difficulty": "medium"
    }
]
